from django.contrib import admin
from django.urls import path, include
from rest_framework.authtoken.views import obtain_auth_token


urlpatterns = [
    # Admin site
    path('admin/', admin.site.urls),

    # Token login for the admin console and student portal
    path('api/auth/token/', obtain_auth_token, name='api_token'),

    # Hostels, room types, rooms, allocation and room transfers
    path('api/', include('apps.hostels.urls')),

    # Students and the student portal
    path('api/', include('apps.students.urls')),

    # Fees and the room-type fee calculator
    path('api/', include('apps.finance.urls')),
]

# Admin site customization
admin.site.site_header = 'Hostel Management Administration'
admin.site.site_title = 'Hostel Admin'
admin.site.index_title = 'Welcome to Hostel Management'

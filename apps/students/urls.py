# apps/students/urls.py

from django.urls import path
from rest_framework.routers import SimpleRouter

from . import views

app_name = 'students'

router = SimpleRouter()
router.register('students', views.StudentViewSet, basename='student')

urlpatterns = router.urls + [
    # Student portal
    path('student/profile/', views.portal_profile, name='portal_profile'),
    path('student/fees/', views.portal_fees, name='portal_fees'),
    path('student/room-transfers/', views.portal_room_transfers, name='portal_room_transfers'),
]

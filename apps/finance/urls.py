# apps/finance/urls.py

from rest_framework.routers import SimpleRouter

from . import views

app_name = 'finance'

router = SimpleRouter()
router.register('fees', views.FeeViewSet, basename='fee')

urlpatterns = router.urls

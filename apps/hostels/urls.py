# apps/hostels/urls.py

from rest_framework.routers import SimpleRouter

from . import views

app_name = 'hostels'

router = SimpleRouter()
# Room types first so ``rooms/types/...`` is not read as a room id.
router.register('rooms/types', views.RoomTypeViewSet, basename='roomtype')
router.register('rooms', views.RoomViewSet, basename='room')
router.register('room-transfers', views.RoomTransferViewSet, basename='roomtransfer')
router.register('hostels', views.HostelViewSet, basename='hostel')

urlpatterns = router.urls

from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from velvet_routes.applications.inventory.api.views import (
    BusViewSet,
    CarViewSet,
    FlightViewSet,
    HotelViewSet,
    TrainViewSet,
)

if settings.DEBUG:
    router = DefaultRouter()
else:
    router = SimpleRouter()

router.register("hotels", HotelViewSet, basename="hotels")
router.register("flights", FlightViewSet, basename="flights")
router.register("cars", CarViewSet, basename="cars")
router.register("trains", TrainViewSet, basename="trains")
router.register("buses", BusViewSet, basename="buses")

app_name = "inventory"
urlpatterns = router.urls

from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from velvet_routes.applications.trips.api.views import TripViewSet

if settings.DEBUG:
    router = DefaultRouter()
else:
    router = SimpleRouter()

router.register("trips", TripViewSet, basename="trips")

app_name = "trips"
urlpatterns = router.urls

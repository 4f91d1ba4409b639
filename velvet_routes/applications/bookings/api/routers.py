from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from velvet_routes.applications.bookings.api.views import BookingViewSet

if settings.DEBUG:
    router = DefaultRouter()
else:
    router = SimpleRouter()

router.register("bookings", BookingViewSet, basename="bookings")

app_name = "bookings"
urlpatterns = router.urls

from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from velvet_routes.applications.reviews.api.views import ReviewViewSet

if settings.DEBUG:
    router = DefaultRouter()
else:
    router = SimpleRouter()

router.register("reviews", ReviewViewSet, basename="reviews")

app_name = "reviews"
urlpatterns = router.urls

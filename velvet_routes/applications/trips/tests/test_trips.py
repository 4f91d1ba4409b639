import pytest

from velvet_routes.applications.trips.models import Trip

pytestmark = pytest.mark.django_db

TRIPS_URL = "/api/trips/"

TRIP = {
    "title": "Summer in Lisbon",
    "destination": "Lisbon, Portugal",
    "startDate": "2026-07-01",
    "endDate": "2026-07-10",
    "description": "Beaches and pasteis de nata",
    "activities": [{"name": "Tram 28"}, {"name": "Belem Tower", "completed": True}],
    "location": {"lat": 38.7223, "lng": -9.1393},
}


class TestTrips:
    def test_create(self, auth_client, user):
        response = auth_client.post(TRIPS_URL, TRIP, format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["startDate"] == "2026-07-01"
        assert body["activities"] == [
            {"name": "Tram 28", "completed": False},
            {"name": "Belem Tower", "completed": True},
        ]
        assert Trip.objects.get().user == user

    def test_end_before_start(self, auth_client):
        response = auth_client.post(TRIPS_URL, {**TRIP, "endDate": "2026-06-01"}, format="json")

        assert response.status_code == 400
        assert "endDate" in response.json()

    def test_list_only_own_trips_in_date_order(self, auth_client, user, other_user):
        later = Trip.objects.create(
            user=user, title="B", destination="Rome", start_date="2026-09-01", end_date="2026-09-05"
        )
        earlier = Trip.objects.create(
            user=user, title="A", destination="Oslo", start_date="2026-03-01", end_date="2026-03-03"
        )
        Trip.objects.create(
            user=other_user, title="C", destination="Lima", start_date="2026-01-01", end_date="2026-01-02"
        )

        response = auth_client.get(TRIPS_URL)

        assert [trip["id"] for trip in response.json()] == [earlier.id, later.id]

    def test_partial_update_checks_dates(self, auth_client):
        trip_id = auth_client.post(TRIPS_URL, TRIP, format="json").json()["id"]

        ok = auth_client.patch(f"{TRIPS_URL}{trip_id}/", {"endDate": "2026-07-12"}, format="json")
        bad = auth_client.patch(f"{TRIPS_URL}{trip_id}/", {"endDate": "2026-06-12"}, format="json")

        assert ok.status_code == 200
        assert bad.status_code == 400
        assert str(Trip.objects.get().end_date) == "2026-07-12"

    def test_other_users_trip_is_not_found(self, api_client, other_user, auth_client):
        trip_id = auth_client.post(TRIPS_URL, TRIP, format="json").json()["id"]
        api_client.force_authenticate(other_user)

        assert api_client.get(f"{TRIPS_URL}{trip_id}/").status_code == 404
        assert api_client.delete(f"{TRIPS_URL}{trip_id}/").status_code == 404

    def test_delete(self, auth_client):
        trip_id = auth_client.post(TRIPS_URL, TRIP, format="json").json()["id"]

        assert auth_client.delete(f"{TRIPS_URL}{trip_id}/").status_code == 204
        assert not Trip.objects.exists()

    def test_requires_authentication(self, api_client):
        assert api_client.get(TRIPS_URL).status_code == 401

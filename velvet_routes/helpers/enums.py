from django.db.models import TextChoices


class UserRole(TextChoices):
    USER = ("USER", "User")
    ADMIN = ("ADMIN", "Admin")


class TravelMode(TextChoices):
    HOTEL = ("HOTEL", "Hotel")
    FLIGHT = ("FLIGHT", "Flight")
    CAR = ("CAR", "Car Rental")
    TRAIN = ("TRAIN", "Train")
    BUS = ("BUS", "Bus")


class BookingStatus(TextChoices):
    PENDING = ("PENDING", "Pending")
    CONFIRMED = ("CONFIRMED", "Confirmed")
    CANCELLED = ("CANCELLED", "Cancelled")


class PaymentStatus(TextChoices):
    PENDING = ("PENDING", "Pending")
    SUCCEEDED = ("SUCCEEDED", "Succeeded")
    FAILED = ("FAILED", "Failed")


class PaymentProvider(TextChoices):
    STRIPE = ("STRIPE", "Stripe")


class NotificationChannel(TextChoices):
    EMAIL = ("EMAIL", "Email")
    SMS = ("SMS", "SMS")
    PUSH = ("PUSH", "Push")
    WHATSAPP = ("WHATSAPP", "WhatsApp")


class NotificationStatus(TextChoices):
    PENDING = ("PENDING", "Pending")
    DELIVERED = ("DELIVERED", "Delivered")
    FAILED = ("FAILED", "Failed")


class TravelClassChoice(TextChoices):
    ECONOMY = ("economy", "Economy")
    PREMIUM_ECONOMY = ("premium_economy", "Premium Economy")
    BUSINESS = ("business", "Business")
    FIRST = ("first", "First")

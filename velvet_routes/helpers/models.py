from django.db import models
import auto_prefetch


class TimeBasedModel(auto_prefetch.Model):
    """
    Abstract base for every model that needs creation/update timestamps.
    """

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(auto_prefetch.Model.Meta):
        abstract = True
        ordering = ["-created_at", "id"]

    def __str__(self):
        return f"< {type(self).__name__}({self.pk}) >"

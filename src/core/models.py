"""Shared abstract models."""
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base adding ``created_at`` / ``updated_at`` bookkeeping."""

    created_at = models.DateTimeField("created at", auto_now_add=True)
    updated_at = models.DateTimeField("updated at", auto_now=True)

    class Meta:
        abstract = True

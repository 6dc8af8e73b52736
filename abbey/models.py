from django.db import models


class TimeStampedModel(models.Model):
    """
    An abstract base class model that provides a self-populating
    created_at field.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        abstract = True

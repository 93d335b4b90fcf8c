from django.db import models


class Bucket(models.Model):
    """A named collection of entries with its own id sequence."""

    name = models.CharField(max_length=64, unique=True)
    sequence = models.PositiveBigIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.name} (seq {self.sequence})"


class Entry(models.Model):
    """Represents a persisted key/value pair inside a bucket."""

    bucket = models.ForeignKey(Bucket, on_delete=models.CASCADE, related_name="entries")
    key = models.CharField(max_length=20)
    value = models.BinaryField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("bucket", "key"), name="unique_key_per_bucket"),
        ]

    def __str__(self) -> str:
        return f"{self.bucket_id}:{self.key}"

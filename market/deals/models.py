from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone


class SpecialDeal(models.Model):
    """Time-limited promotion shown on the storefront home page"""
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    # Display-only; order pricing uses each product's own discount rate
    discount_rate = models.IntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    is_active = models.BooleanField(default=True)
    display_order = models.IntegerField(default=0)
    banner_image_url = models.URLField(max_length=500, blank=True)
    background_color = models.CharField(max_length=20, blank=True)
    text_color = models.CharField(max_length=20, blank=True)
    products = models.ManyToManyField('catalog.Product', blank=True, related_name='special_deals')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    def clean(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({'end_time': 'End time must be after start time'})

    @property
    def is_ongoing(self):
        now = timezone.now()
        return self.is_active and self.start_time <= now <= self.end_time

    @property
    def is_upcoming(self):
        return self.is_active and timezone.now() < self.start_time

    @property
    def is_expired(self):
        return timezone.now() > self.end_time

    class Meta:
        db_table = 'special_deals'
        ordering = ['display_order', '-start_time']

"""
URL configuration for the market project.

Every app mounts its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Fresh Market Admin Panel"
admin.site.site_title = "Fresh Market Admin Portal"
admin.site.index_title = "Marketplace administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('market.core.urls')),
    path('api/v1/', include('market.catalog.urls')),
    path('api/v1/', include('market.reviews.urls')),
    path('api/v1/', include('market.sellers.urls')),
    path('api/v1/', include('market.orders.urls')),
    path('api/v1/', include('market.coupons.urls')),
    path('api/v1/', include('market.wishlist.urls')),
    path('api/v1/', include('market.deals.urls')),
    path('api/v1/', include('market.inventory.urls')),
    path('api/v1/', include('market.support.urls')),
    path('api/v1/', include('market.returns.urls')),
    path('api/v1/', include('market.reports.urls')),
]

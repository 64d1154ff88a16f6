# Artisan Storefront

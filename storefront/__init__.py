"""Boutique de démonstration: catalogue, panier, checkout Stripe et règlement du stock."""

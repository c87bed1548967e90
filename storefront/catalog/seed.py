"""
Catalogue de démonstration (sans base de données).
Sert à amorcer InMemoryProductStore; les prix sont en centimes.
"""
from typing import List

from .models import Product

DEFAULT_PRODUCTS = [
    {
        "id": "prod-1",
        "name": "Veste en Jean Vintage",
        "description": "Une veste en jean classique, style vintage des années 90.",
        "unit_price": 4500,
        "image": "https://images.unsplash.com/photo-1576871333019-220ef346ddbb?w=800&q=80",
        "stock": 10,
    },
    {
        "id": "prod-2",
        "name": "Sneakers Premium",
        "description": "Baskets confortables et élégantes pour toutes les occasions.",
        "unit_price": 8900,
        "image": "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=800&q=80",
        "stock": 5,
    },
    {
        "id": "prod-3",
        "name": "Sac à Main en Cuir",
        "description": "Sac à main artisanal en cuir véritable, finition soignée.",
        "unit_price": 12000,
        "image": "https://images.unsplash.com/photo-1548036328-c9fa89d128fa?w=800&q=80",
        "stock": 3,
    },
    {
        "id": "prod-4",
        "name": "Montre Minimaliste",
        "description": "Design épuré et mécanisme de précision pour un look sophistiqué.",
        "unit_price": 15000,
        "image": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=800&q=80",
        "stock": 7,
    },
    {
        "id": "prod-5",
        "name": "Lunettes de Soleil",
        "description": "Protection UV totale avec une monture élégante et légère.",
        "unit_price": 3500,
        "image": "https://images.unsplash.com/photo-1511499767390-90342f568952?w=800&q=80",
        "stock": 12,
    },
    {
        "id": "prod-6",
        "name": "Appareil Photo Vintage",
        "description": "Capturez vos moments avec ce style argentique intemporel.",
        "unit_price": 25000,
        "image": "https://images.unsplash.com/photo-1516035069371-29a1b244cc32?w=800&q=80",
        "stock": 2,
    },
    {
        "id": "prod-7",
        "name": "Casque Audio Sans Fil",
        "description": "Son haute fidélité avec réduction de bruit active.",
        "unit_price": 19900,
        "image": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800&q=80",
        "stock": 8,
    },
    {
        "id": "prod-8",
        "name": "Plante Décorative Monstera",
        "description": "Apportez une touche de nature à votre intérieur avec cette magnifique plante.",
        "unit_price": 2500,
        "image": "https://images.unsplash.com/photo-1614594975525-e45190c55d0b?w=800&q=80",
        "stock": 15,
    },
    {
        "id": "prod-9",
        "name": "Enceinte Bluetooth",
        "description": "Un son puissant et portable pour toutes vos aventures.",
        "unit_price": 7900,
        "image": "https://images.unsplash.com/photo-1608156639585-b3a032ef9689?w=800&q=80",
        "stock": 10,
    },
    {
        "id": "prod-10",
        "name": "Cahier de Notes en Cuir",
        "description": "Parfait pour vos croquis, pensées et projets créatifs.",
        "unit_price": 1800,
        "image": "https://images.unsplash.com/photo-1531346878377-a5be20888e57?w=800&q=80",
        "stock": 20,
    },
]


def default_products() -> List[Product]:
    # Copies fraîches: chaque store possède ses propres instances
    return [Product(**p) for p in DEFAULT_PRODUCTS]

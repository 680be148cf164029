from __future__ import annotations

from typing import Any


def _multipliers(sedan: float, suv: float, truck: float, van: float, coupe: float, luxury: float) -> dict[str, float]:
    return {"sedan": sedan, "suv": suv, "truck": truck, "van": van, "coupe": coupe, "luxury": luxury}


SERVICE_SEED: list[dict[str, Any]] = [
    {
        "name": "Express Exterior Wash",
        "description": "Quick exterior wash with hand dry. Perfect for regular maintenance.",
        "category": "exterior",
        "base_price": 49,
        "duration_minutes": 30,
        "vehicle_type_multipliers": _multipliers(1.0, 1.3, 1.4, 1.4, 1.0, 1.5),
    },
    {
        "name": "Premium Exterior Detail",
        "description": "Complete exterior detail including wash, clay bar, polish, and wax protection.",
        "category": "exterior",
        "base_price": 149,
        "duration_minutes": 120,
        "vehicle_type_multipliers": _multipliers(1.0, 1.4, 1.5, 1.5, 1.0, 1.6),
    },
    {
        "name": "Interior Deep Clean",
        "description": "Thorough interior cleaning including vacuum, shampoo, and leather conditioning.",
        "category": "interior",
        "base_price": 129,
        "duration_minutes": 90,
        "vehicle_type_multipliers": _multipliers(1.0, 1.3, 1.2, 1.5, 0.9, 1.4),
    },
    {
        "name": "Complete Interior Detail",
        "description": "Premium interior service with steam cleaning, odor removal, and protection treatment.",
        "category": "interior",
        "base_price": 199,
        "duration_minutes": 150,
        "vehicle_type_multipliers": _multipliers(1.0, 1.4, 1.3, 1.6, 0.9, 1.5),
    },
    {
        "name": "Full Detail Package",
        "description": "Complete interior and exterior detailing for a showroom finish.",
        "category": "full-detail",
        "base_price": 299,
        "duration_minutes": 240,
        "vehicle_type_multipliers": _multipliers(1.0, 1.4, 1.5, 1.6, 1.0, 1.7),
    },
    {
        "name": "Ultimate Detail Experience",
        "description": (
            "Our most comprehensive service including paint correction, ceramic coating prep, "
            "and premium protection."
        ),
        "category": "full-detail",
        "base_price": 499,
        "duration_minutes": 360,
        "vehicle_type_multipliers": _multipliers(1.0, 1.5, 1.6, 1.7, 1.0, 1.8),
    },
    {
        "name": "Headlight Restoration",
        "description": "Professional headlight restoration to improve visibility and appearance.",
        "category": "specialty",
        "base_price": 89,
        "duration_minutes": 60,
        "vehicle_type_multipliers": _multipliers(1.0, 1.0, 1.0, 1.0, 1.0, 1.2),
    },
    {
        "name": "Engine Bay Detailing",
        "description": "Thorough engine compartment cleaning and dressing for a pristine look.",
        "category": "specialty",
        "base_price": 79,
        "duration_minutes": 45,
        "vehicle_type_multipliers": _multipliers(1.0, 1.2, 1.3, 1.2, 1.0, 1.3),
    },
    {
        "name": "Pet Hair Removal",
        "description": "Specialized service to remove stubborn pet hair from all interior surfaces.",
        "category": "specialty",
        "base_price": 69,
        "duration_minutes": 60,
        "vehicle_type_multipliers": _multipliers(1.0, 1.3, 1.2, 1.4, 0.9, 1.2),
    },
    {
        "name": "Odor Elimination Treatment",
        "description": "Professional ozone treatment to eliminate smoke, pet, and other stubborn odors.",
        "category": "specialty",
        "base_price": 99,
        "duration_minutes": 90,
        "vehicle_type_multipliers": _multipliers(1.0, 1.2, 1.2, 1.3, 1.0, 1.2),
    },
]

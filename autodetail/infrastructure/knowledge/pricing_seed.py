from __future__ import annotations

from autodetail.application.use_cases.knowledge import KnowledgeSeed
from autodetail.domain.entities.knowledge_item import KnowledgeCategory

PRICING_KNOWLEDGE_SEED: list[KnowledgeSeed] = [
    KnowledgeSeed(
        content=(
            "Peak demand periods for auto detailing are typically Friday through Sunday, especially before "
            "holidays and special events. Prices can increase by 15-25% during these high-demand periods."
        ),
        category=KnowledgeCategory.market_trends,
        source="Industry Analysis 2024",
    ),
    KnowledgeSeed(
        content=(
            "Seasonal factors significantly impact pricing. Spring and summer see 30-40% higher demand due to "
            "better weather and vacation season. Winter detailing often includes salt removal and requires "
            "20% more time."
        ),
        category=KnowledgeCategory.seasonal_factors,
        source="Seasonal Demand Study",
    ),
    KnowledgeSeed(
        content=(
            "Larger vehicles (SUVs, trucks, vans) require 40-60% more time and materials than sedans. Luxury "
            "vehicles command 25-35% premium due to specialized care requirements and higher customer "
            "expectations."
        ),
        category=KnowledgeCategory.service_costs,
        source="Service Cost Analysis",
    ),
    KnowledgeSeed(
        content=(
            "Customer loyalty programs show that repeat customers are willing to pay 10-15% more for guaranteed "
            "quality and convenience. First-time customers are more price-sensitive and respond well to "
            "introductory discounts."
        ),
        category=KnowledgeCategory.customer_behavior,
        source="Customer Retention Study",
    ),
    KnowledgeSeed(
        content=(
            "Local market competition analysis shows average exterior detail pricing ranges from $80-$150, "
            "interior from $120-$200, and full detail from $180-$350 depending on vehicle size and location."
        ),
        category=KnowledgeCategory.competition,
        source="Competitive Market Analysis",
    ),
    KnowledgeSeed(
        content=(
            "Time-of-day pricing optimization: Morning slots (8am-11am) have lower demand and can be discounted "
            "10-15%. Afternoon slots (2pm-5pm) are most popular and can command premium pricing."
        ),
        category=KnowledgeCategory.market_trends,
        source="Booking Pattern Analysis",
    ),
    KnowledgeSeed(
        content=(
            "Weather conditions impact demand significantly. Rainy days see 40% drop in bookings, while sunny "
            "days after rain see 25% increase. Dynamic pricing should adjust accordingly."
        ),
        category=KnowledgeCategory.seasonal_factors,
        source="Weather Impact Study",
    ),
    KnowledgeSeed(
        content=(
            "Service bundling increases average transaction value by 35%. Customers booking multiple services "
            "are less price-sensitive and value convenience over individual service pricing."
        ),
        category=KnowledgeCategory.customer_behavior,
        source="Service Bundle Analysis",
    ),
]

"""
Festival matching and recommendation engine.

Responsibilities:
- Accept quiz answers (genres, budget, months, region, vibes, ...) as Criteria.
- Filter the catalog by explicit browse constraints.
- Score every festival across independent dimensions and blend the scores.
- Rank, tier and explain matches, ready for API serialisation.
"""

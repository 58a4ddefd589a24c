"""Splitting the comma-delimited charges field and classifying each charge."""

from __future__ import annotations

OTHER = "Other"

# Evaluated top to bottom; the first rule with a matching keyword wins.
# A "POSSESSION OF FIREARM" charge is therefore Drug, not Weapon.
CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Assault", ("ASSAULT", "BATTERY", "ABUSE")),
    ("Theft", ("THEFT", "LARCENY", "ROBBERY", "BURGLARY")),
    ("Drug", ("DRUG", "NARCOTIC", "CONTROLLED SUBSTANCE", "POSSESSION")),
    # MA records DUI as OUI
    ("Traffic", ("TRAFFIC", "DUI", "DWI", "OUI", "OPERATING", "LICENSE", "VEHICLE")),
    ("Warrant", ("WARRANT", "FUGITIVE")),
    ("Weapon", ("WEAPON", "FIREARM", "GUN")),
    ("Disorderly Conduct", ("DISORDERLY", "DISTURBANCE", "TRESPASS")),
    ("Domestic Violence", ("DOMESTIC", "DV")),
    ("Fraud", ("FRAUD", "FORGERY", "IDENTITY")),
    ("Vandalism", ("VANDALISM", "MALICIOUS")),
)

CATEGORIES: tuple[str, ...] = tuple(label for label, _ in CATEGORY_RULES) + (OTHER,)


def tokenize_charges(charges: str | None) -> list[str]:
    """Individual charges from one record, trimmed, empties dropped."""
    if not charges:
        return []
    return [c.strip() for c in charges.split(",") if c.strip()]


def classify_charge(charge: str) -> str:
    text = charge.upper()
    for label, keywords in CATEGORY_RULES:
        if any(k in text for k in keywords):
            return label
    return OTHER

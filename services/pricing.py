# services/pricing.py
"""
Fixed rental rate tables (INR).

Each table is keyed by controller count (1-4), then by duration: hours 1-6
for hourly rentals, days 1-7 for daily rentals. Anything outside a table has
no price, which callers must treat as an invalid selection.
"""

from types import MappingProxyType


def _freeze(table):
    return MappingProxyType({
        controllers: MappingProxyType(dict(enumerate(prices, start=1)))
        for controllers, prices in table.items()
    })


HOURLY_STANDARD = _freeze({
    1: (150, 280, 400, 500, 600, 700),
    2: (200, 370, 520, 650, 780, 900),
    3: (250, 460, 640, 800, 960, 1100),
    4: (300, 550, 750, 950, 1140, 1300),
})

HOURLY_MEMBER = _freeze({
    1: (120, 225, 320, 400, 480, 560),
    2: (160, 295, 415, 520, 620, 720),
    3: (200, 370, 510, 640, 770, 880),
    4: (240, 440, 600, 760, 910, 1040),
})

DAILY_STANDARD = _freeze({
    1: (950, 1490, 1920, 2250, 2480, 2700, 2750),
    2: (1100, 1650, 2090, 2420, 2640, 2860, 2970),
    3: (1370, 1920, 2360, 2690, 2910, 3130, 3300),
    4: (1650, 2300, 2950, 3080, 3300, 3520, 3740),
})

DAILY_MEMBER = _freeze({
    1: (849, 1339, 1739, 2049, 2249, 2449, 2499),
    2: (999, 1599, 1899, 2199, 2399, 2599, 2699),
    3: (1269, 1379, 2159, 2549, 2649, 2829, 2999),
    4: (1499, 2099, 2499, 2799, 2999, 3199, 3399),
})

PRICING_TABLES = MappingProxyType({
    ('hourly', False): HOURLY_STANDARD,
    ('hourly', True): HOURLY_MEMBER,
    ('daily', False): DAILY_STANDARD,
    ('daily', True): DAILY_MEMBER,
})


def select_table(period, is_member):
    return PRICING_TABLES.get((period, bool(is_member)))


def get_price(console, controllers, duration, period, is_member):
    """
    Return the rental price, or None when the selection is not priced.

    ``console`` does not affect the rate; it is accepted so callers can pass
    the full selection.
    """
    table = select_table(period, is_member)
    if table is None:
        return None
    return table.get(controllers, {}).get(duration)

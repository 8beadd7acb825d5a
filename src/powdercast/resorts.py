"""Resort reference data.

Mid elevation is the midpoint of base and top unless a published mid-mountain
station exists.
"""

from typing import Optional

from powdercast.models import Resort

RESORTS = [
    # Washington
    Resort("stevens-pass", "Stevens Pass", 47.7448, -121.0890, "US", 1241, 1652, 2064, "America/Los_Angeles"),
    Resort("crystal-mountain", "Crystal Mountain", 46.9282, -121.5045, "US", 1341, 1783, 2225, "America/Los_Angeles"),
    Resort("mt-baker", "Mt. Baker", 48.8570, -121.6695, "US", 1280, 1509, 1737, "America/Los_Angeles"),
    # Oregon
    Resort("mt-bachelor", "Mt. Bachelor", 43.9792, -121.6886, "US", 1920, 2455, 2990, "America/Los_Angeles"),
    # California
    Resort("mammoth", "Mammoth Mountain", 37.6308, -119.0326, "US", 2424, 2897, 3369, "America/Los_Angeles"),
    Resort("kirkwood", "Kirkwood", 38.6850, -120.0652, "US", 2377, 2682, 2987, "America/Los_Angeles"),
    # Colorado
    Resort("vail", "Vail", 39.6403, -106.3742, "US", 2476, 3008, 3540, "America/Denver"),
    Resort("breckenridge", "Breckenridge", 39.4817, -106.0384, "US", 2926, 3368, 3810, "America/Denver"),
    Resort("telluride", "Telluride", 37.9375, -107.8123, "US", 2659, 3209, 3759, "America/Denver"),
    # Utah
    Resort("snowbird", "Snowbird", 40.5830, -111.6538, "US", 2365, 2845, 3325, "America/Denver"),
    Resort("alta", "Alta", 40.5884, -111.6386, "US", 2600, 2936, 3271, "America/Denver"),
    # Wyoming / Montana
    Resort("jackson-hole", "Jackson Hole", 43.5875, -110.8279, "US", 1924, 2555, 3185, "America/Denver"),
    Resort("big-sky", "Big Sky", 45.2618, -111.4018, "US", 2072, 2737, 3402, "America/Denver"),
    # Canada
    Resort("whistler", "Whistler Blackcomb", 50.1163, -122.9574, "CA", 675, 1500, 2284, "America/Vancouver"),
    Resort("revelstoke", "Revelstoke", 50.9584, -118.1636, "CA", 512, 1300, 2225, "America/Vancouver"),
    # Alps
    Resort("zermatt", "Zermatt", 46.0207, 7.7491, "CH", 1620, 2600, 3883, "Europe/Zurich"),
    Resort("st-anton", "St. Anton", 47.1287, 10.2640, "AT", 1304, 2085, 2811, "Europe/Vienna"),
    Resort("chamonix", "Chamonix", 45.9237, 6.8694, "FR", 1035, 2000, 3842, "Europe/Paris"),
    # Japan
    Resort("niseko", "Niseko United", 42.8048, 140.6874, "JP", 260, 800, 1308, "Asia/Tokyo"),
]

_BY_SLUG = {resort.slug: resort for resort in RESORTS}


def get_resort(slug: str) -> Optional[Resort]:
    """Look up a resort by slug (case-insensitive)."""
    return _BY_SLUG.get(slug.lower())

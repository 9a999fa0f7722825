"""
Zip code coordinates and great-circle distances.

Coordinates cover a handful of metro areas (New York, Los Angeles,
Chicago, San Francisco). Zip codes outside the table have no known
location and therefore no distance.
"""

import math

EARTH_RADIUS_MILES = 3959

SEARCH_RADIUS_OPTIONS = (5, 10, 25, 50, 100)
DEFAULT_SEARCH_RADIUS = 25

# zip -> (latitude, longitude)
ZIP_CODE_COORDINATES: dict[str, tuple[float, float]] = {
    # New York
    "10001": (40.7506, -73.9971),
    "10002": (40.7155, -73.9862),
    "10003": (40.7311, -73.9880),
    "10004": (40.6899, -74.0165),
    "10005": (40.7060, -74.0086),
    "10006": (40.7091, -74.0127),
    "10007": (40.7134, -74.0080),
    "10009": (40.7264, -73.9780),
    "10010": (40.7390, -73.9819),
    "10011": (40.7406, -74.0008),
    "10012": (40.7255, -73.9983),
    "10013": (40.7206, -74.0041),
    "10014": (40.7341, -74.0065),
    "10016": (40.7450, -73.9786),
    "10017": (40.7519, -73.9724),
    "10018": (40.7553, -73.9933),
    "10019": (40.7656, -73.9863),
    "10020": (40.7586, -73.9787),
    "10021": (40.7686, -73.9588),
    "10022": (40.7583, -73.9675),
    "10023": (40.7762, -73.9822),
    "10024": (40.7932, -73.9736),
    "10025": (40.7985, -73.9665),
    "10026": (40.8019, -73.9524),
    "10027": (40.8116, -73.9533),
    "10028": (40.7764, -73.9532),
    "10029": (40.7917, -73.9438),
    "10030": (40.8183, -73.9428),
    "10031": (40.8252, -73.9496),
    "10032": (40.8388, -73.9423),
    "10033": (40.8500, -73.9343),
    "10034": (40.8674, -73.9226),
    "10035": (40.7948, -73.9291),
    "10036": (40.7594, -73.9908),
    "10037": (40.8128, -73.9372),
    "10038": (40.7092, -74.0026),
    "10039": (40.8291, -73.9360),
    "10040": (40.8583, -73.9302),

    # Los Angeles
    "90001": (33.9731, -118.2479),
    "90002": (33.9495, -118.2467),
    "90003": (33.9642, -118.2728),
    "90004": (34.0760, -118.3095),
    "90005": (34.0599, -118.3089),
    "90006": (34.0484, -118.2929),
    "90007": (34.0278, -118.2850),
    "90008": (34.0087, -118.3407),
    "90010": (34.0620, -118.2954),
    "90011": (33.9980, -118.2583),
    "90012": (34.0639, -118.2378),
    "90013": (34.0446, -118.2467),
    "90014": (34.0433, -118.2528),
    "90015": (34.0408, -118.2672),
    "90016": (34.0280, -118.3520),
    "90017": (34.0549, -118.2595),
    "90018": (34.0262, -118.3089),
    "90019": (34.0426, -118.3252),
    "90020": (34.0668, -118.3091),
    "90021": (34.0318, -118.2362),
    "90022": (34.0246, -118.1554),
    "90023": (34.0210, -118.2073),
    "90024": (34.0634, -118.4455),
    "90025": (34.0500, -118.4428),
    "90026": (34.0775, -118.2654),
    "90027": (34.1066, -118.2939),
    "90028": (34.0990, -118.3267),

    # Chicago
    "60601": (41.8853, -87.6246),
    "60602": (41.8830, -87.6293),
    "60603": (41.8801, -87.6290),
    "60604": (41.8766, -87.6290),
    "60605": (41.8689, -87.6194),
    "60606": (41.8822, -87.6386),
    "60607": (41.8738, -87.6531),
    "60608": (41.8530, -87.6714),
    "60609": (41.8104, -87.6514),
    "60610": (41.9028, -87.6369),
    "60611": (41.8969, -87.6233),
    "60612": (41.8804, -87.6867),
    "60613": (41.9541, -87.6564),
    "60614": (41.9230, -87.6529),
    "60615": (41.8047, -87.6009),
    "60616": (41.8486, -87.6308),
    "60617": (41.7251, -87.5578),
    "60618": (41.9456, -87.7034),
    "60619": (41.7490, -87.6061),
    "60620": (41.7412, -87.6500),

    # San Francisco
    "94102": (37.7799, -122.4194),
    "94103": (37.7725, -122.4108),
    "94104": (37.7918, -122.4021),
    "94105": (37.7864, -122.3892),
    "94107": (37.7620, -122.3991),
    "94108": (37.7916, -122.4078),
    "94109": (37.7928, -122.4205),
    "94110": (37.7485, -122.4147),
    "94111": (37.7983, -122.4039),
    "94112": (37.7210, -122.4420),
    "94114": (37.7574, -122.4350),
    "94115": (37.7849, -122.4372),
    "94116": (37.7436, -122.4855),
    "94117": (37.7702, -122.4408),
    "94118": (37.7815, -122.4616),
    "94121": (37.7767, -122.4935),
    "94122": (37.7594, -122.4864),
    "94123": (37.8000, -122.4367),
    "94124": (37.7318, -122.3899),
    "94127": (37.7346, -122.4592),
    "94131": (37.7421, -122.4371),
    "94132": (37.7223, -122.4770),
    "94133": (37.8008, -122.4098),
    "94134": (37.7197, -122.4148),
}


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in miles, rounded to one decimal place."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_MILES * c, 1)


def get_coordinates(zip_code: str | None) -> tuple[float, float] | None:
    if not zip_code:
        return None
    return ZIP_CODE_COORDINATES.get(zip_code)


def zip_code_distance(zip_a: str | None, zip_b: str | None) -> float | None:
    """Miles between two zip codes, or None if either location is unknown."""
    a = get_coordinates(zip_a)
    b = get_coordinates(zip_b)
    if a is None or b is None:
        return None
    return calculate_distance(a[0], a[1], b[0], b[1])


def is_within_radius(zip_a: str, zip_b: str, radius_miles: float) -> bool:
    distance = zip_code_distance(zip_a, zip_b)
    return distance is not None and distance <= radius_miles


def filter_zip_codes_by_proximity(
    target_zip: str,
    zip_codes: list[str],
    radius_miles: float,
) -> list[tuple[str, float]]:
    """(zip, distance) pairs within the radius, closest first."""
    results = []
    for zip_code in zip_codes:
        distance = zip_code_distance(target_zip, zip_code)
        if distance is not None and distance <= radius_miles:
            results.append((zip_code, distance))
    return sorted(results, key=lambda pair: pair[1])


def zip_codes_within_radius(target_zip: str, radius_miles: float) -> list[tuple[str, float]]:
    return filter_zip_codes_by_proximity(target_zip, list(ZIP_CODE_COORDINATES), radius_miles)

SUBWAY_FARE = 2.75
LOCAL_BUS_FARE = 2.75
EXPRESS_BUS_FARE = 6.75
NYC_FERRY_FARE = 4.00
STATEN_ISLAND_FERRY_FARE = 0.0
EBIKE_UNLOCK_FARE = 5.00
CITI_BIKE_FARE = 3.50
MIXED_LAST_MILE_FARE = 7.50

PER_MILE_RATES = {
    'taxi': 2.8,
    'uber': 2.5,
    'shared': 2.0,
}


def calculate_fare(mode: str, distance_miles: float, service: str = 'regular') -> float:
    """
    Calculate fare based on mode and distance
    Args:
        mode: Transport mode (walk, subway, bus, ferry, bike, ebike, taxi, uber, shared)
        distance_miles: Ride distance in miles
        service: Service variant (regular, express, nyc_ferry, staten_island_ferry)
    Returns:
        Fare amount in dollars, never lower for a longer ride
    """
    if distance_miles < 0:
        raise ValueError(f"Distance must be non-negative, got {distance_miles}")

    if mode == 'walk':
        return 0.0
    if mode == 'subway':
        return SUBWAY_FARE
    if mode == 'bus':
        return EXPRESS_BUS_FARE if service == 'express' else LOCAL_BUS_FARE
    if mode == 'ferry':
        return STATEN_ISLAND_FERRY_FARE if service == 'staten_island_ferry' else NYC_FERRY_FARE
    if mode == 'ebike':
        return EBIKE_UNLOCK_FARE
    if mode == 'bike':
        return CITI_BIKE_FARE
    if mode in PER_MILE_RATES:
        return round(distance_miles * PER_MILE_RATES[mode], 2)
    # Unknown modes are priced like a local fare
    return LOCAL_BUS_FARE

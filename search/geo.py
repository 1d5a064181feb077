"""
Geo radius filter.

Approximates a circular radius search with a latitude/longitude bounding box,
using a fixed number of degrees per kilometer. Good enough for browsing
photos by place, not for real distances.
"""

import math

from search.predicates import Range

# About 1km in degrees of latitude
DEGREES_PER_KM = 0.009

DEFAULT_RADIUS_KM = 20
MIN_RADIUS_KM = 1
MAX_RADIUS_KM = 1000


def effective_radius(dist, default=DEFAULT_RADIUS_KM, maximum=MAX_RADIUS_KM, minimum=MIN_RADIUS_KM):
    """Clamp a requested radius in km to [minimum, maximum]; <=0, unset or NaN means default."""
    if not dist or math.isnan(dist) or dist <= 0:
        return default
    if dist > maximum:
        return maximum
    if dist < minimum:
        return minimum
    return dist


def bounding_box(lat, long, dist, scale=DEGREES_PER_KM):
    """Return ((lat_min, lat_max), (long_min, long_max)) around a center point.

    Latitude and longitude use the same scale, so boxes get narrower in real
    terms the further they are from the equator.
    """
    delta = scale * dist
    return (lat - delta, lat + delta), (long - delta, long + delta)


def radius_predicates(lat, long, dist, scale=DEGREES_PER_KM,
                      default=DEFAULT_RADIUS_KM, maximum=MAX_RADIUS_KM):
    """Build Range predicates for a radius search.

    A zero latitude or longitude means "not given" and adds no bound on that axis.
    """
    if not lat and not long:
        return []

    radius = effective_radius(dist, default=default, maximum=maximum)
    (lat_min, lat_max), (long_min, long_max) = bounding_box(lat, long, radius, scale=scale)

    predicates = []
    if lat:
        predicates.append(Range(field='photo_lat', lower=lat_min, upper=lat_max))
    if long:
        predicates.append(Range(field='photo_long', lower=long_min, upper=long_max))
    return predicates

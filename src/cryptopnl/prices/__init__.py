from .cache import PriceCache  # re-export

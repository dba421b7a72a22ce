from roomkit.core.natural_order import NaturalOrderComparer, natural_sorted

__all__ = ["NaturalOrderComparer", "natural_sorted"]

# Models package init: importing it registers every table on Base.metadata
from catalog.models.coffee import Coffee, Flavour, coffees_flavours
from catalog.models.event import Event

__all__ = ["Coffee", "Flavour", "Event", "coffees_flavours"]

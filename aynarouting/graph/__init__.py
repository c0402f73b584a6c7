from .transit_graph import TransitGraph

__all__ = ['TransitGraph']

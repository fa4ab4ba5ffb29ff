"""EV mobility & charging profile synthesizer.

Generates per-vehicle Workday/Weekend trip schedules for passenger cars, vans,
trucks and buses and derives energy, state-of-charge and charging-time
outputs from them.
"""

__version__ = "1.0.0"

"""
Homeostat: a homeostatic decision-making core for an autonomous agent.

Three needs (energy, tegument, integrity) compete for one body.
Proximity readings feed the needs and reveal damage; winner-take-all
arbitration picks the behaviour that drives the wheels every cycle.
"""

__version__ = "0.1.0"

"""
Environments for running the agent without hardware.

- simulated_body: proximity ring, wheels, feedback panel and battery
"""

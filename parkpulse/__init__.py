"""ParkPulse - live parking availability simulation and distance ranking."""

"""Rupture Forecast

The rupture forecast package builds earthquake rupture forecasts for faults
and fault systems whose total moment release matches the fault slip rate.

Fault Geometry
--------------

Faults are split into equal-length sections (`rupture_forecast.sections`)
with slip rates interpolated between known points along strike
(`rupture_forecast.slip_rate`). Each section has a rupture surface, and the
surfaces of the sections in a rupture are merged into one composite
surface with consistent orientation (`rupture_forecast.surfaces`).

Magnitude-Frequency Distributions
---------------------------------

The `rupture_forecast.mfd` module builds Gutenberg-Richter and
characteristic magnitude-frequency branches for epistemic and aleatory
magnitude uncertainty, each balanced against the fault moment rate from
`rupture_forecast.moment`.

Ruptures
--------

- `rupture_forecast.ruptures` turns MFD branches into ruptures whose rates
  follow the along-strike slip rate,
- `rupture_forecast.combine` merges rupture sets built for overlapping
  paths through a fault system (`rupture_forecast.fault_system`),
- `rupture_forecast.aftershock` removes aftershocks from raw rates,
- `rupture_forecast.inversion` builds ruptures from inversion solutions.

The `rupture_forecast.forecast` module ties these together, and can
forecast many fault systems in parallel."""

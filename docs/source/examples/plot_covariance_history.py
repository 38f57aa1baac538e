"""
Covariance History
==================

Show how the formal errors of a batch estimate shrink as observations accumulate.

This example demonstrates :func:`.calculateCovarianceMatrixAsFunctionOfTime` on two ground
stations observing the same vehicle, along with a simple plot.
"""

# %%
# Imports
# -------

# Third Party Imports
import numpy as np
from matplotlib import pyplot as plt

# %%
# Create Observation Data
# -----------------------
#
# Station 1 measures range every two minutes for an hour, station 2 measures angles every ten
# minutes over the second half hour. Both stations see the vehicle at some of the same times.

# ODCOV Imports
from odcov.common.labels import LinkEndType, ObservableType
from odcov.estimation import ObservationCollection, ObservationRecord

range_times = np.arange(0.0, 3600.0 + 120.0, 120.0)  # seconds
angle_times = np.arange(1800.0, 3600.0 + 600.0, 600.0)  # seconds

observations = ObservationCollection(
    [
        ObservationRecord(
            ObservableType.ONE_WAY_RANGE,
            ((LinkEndType.TRANSMITTER, "Station1"), (LinkEndType.RECEIVER, "Vehicle")),
            7000.0 + range_times / 100.0,
            range_times,
        ),
        ObservationRecord(
            ObservableType.ANGULAR_POSITION,
            ((LinkEndType.TRANSMITTER, "Vehicle"), (LinkEndType.RECEIVER, "Station2")),
            np.zeros(2 * angle_times.shape[0]),
            angle_times,
        ),
    ],
)
print(f"Total scalar observations: {observations.num_scalar_observations}")

# %%
# Create Normal Equations Products
# --------------------------------
#
# Estimate a position and a velocity parameter. Range constrains mostly the position, angles
# mostly the velocity. Rows follow the record order above.

rng = np.random.default_rng(seed=42)
range_partials = np.column_stack([np.ones_like(range_times), 1e-4 * range_times])
num_angles = 2 * angle_times.shape[0]
angle_partials = np.column_stack([0.1 * np.ones(num_angles), rng.uniform(0.5, 1.0, num_angles)])
information_matrix = np.vstack([range_partials, angle_partials])

weights = np.concatenate([np.full(range_times.shape[0], 1.0 / 0.01**2), np.full(num_angles, 1.0 / 0.1**2)])
normalization_factors = np.array([1.0, 1e-3])
inverse_apriori_covariance = np.diag([1e-6, 1e-6])

# %%
# Compute Covariance History
# --------------------------
#
# Query the covariance every five minutes.

# ODCOV Imports
from odcov.estimation import calculateCovarianceMatrixAsFunctionOfTime

history = calculateCovarianceMatrixAsFunctionOfTime(
    observations,
    information_matrix,
    normalization_factors,
    300.0,
    weights,
    inverse_apriori_covariance,
)
print(history)

# %%
# Plot Data
# ---------
#
# The velocity uncertainty drops sharply once station 2 starts observing.

# ODCOV Imports
from odcov.reporting import plotFormalErrorHistory

fig = plotFormalErrorHistory(history, parameter_names=["position", "velocity"])
fig.axes[0].set_xlabel("Time (seconds)")
plt.show()

# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import numpy as np

import qdnorm
from qdnorm.quantum import identity_channel, unitary_channel

# Distance between the identity channel and a phase rotation by theta, which
# is 2 sin(theta / 2) for 0 <= theta <= pi
theta = np.pi / 3
U = np.diag([1.0, np.exp(1j * theta)])

res = qdnorm.diamond_norm_distance(identity_channel(2), unitary_channel(U))
exact = 2 * np.sin(theta / 2)

print(f"computed: {res.value:.8f}  exact: {exact:.8f}  ({res.status})")

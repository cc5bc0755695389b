# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import numpy as np

import qdnorm
from qdnorm.quantum import random_channel

np.random.seed(1)

n = 2

# Generate random problem data
L1 = random_channel(n)
L2 = random_channel(n)

# Reuse the lift operator between the different programs
cache = qdnorm.LiftCache()

# Diamond norm distance from the three semidefinite programs
res_primal = qdnorm.diamond_norm_distance(L1, L2, method="primal", cache=cache)
res_dual = qdnorm.diamond_norm_distance(L1, L2, method="dual", cache=cache)
res_alt = qdnorm.diamond_norm_distance(L1, L2, method="alt", cache=cache)

# Diamond norm of the difference of the superoperators
res = qdnorm.diamond_norm(L1 - L2, cache=cache)

print(f"primal distance:  {res_primal.value:.8f}  ({res_primal.status})")
print(f"dual distance:    {res_dual.value:.8f}  ({res_dual.status})")
print(f"alt distance:     {res_alt.value:.8f}  ({res_alt.status})")
print(f"diamond norm:     {res.value:.8f}  ({res.status})")

# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

# __init__.py
from qdnorm._version import __version__  # noqa

import qdnorm.quantum  # noqa
from qdnorm.exceptions import ShapeError, DimensionMismatch, SolverWarning  # noqa
from qdnorm.embedding import embed, unembed, unembed_real, unembed_imag  # noqa
from qdnorm.embedding import trace_real  # noqa
from qdnorm.model import Affine, Problem, bmat  # noqa
from qdnorm.quantum.operator import LiftCache  # noqa
from qdnorm.diamond import DiamondNormResult  # noqa
from qdnorm.diamond import diamond_norm, diamond_norm_distance  # noqa

# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

# __init__.py
from qdnorm.quantum.operator import ket, bra  # noqa
from qdnorm.quantum.operator import lift_operator, LiftCache  # noqa
from qdnorm.quantum.operator import choi_involution, choi_to_superop  # noqa
from qdnorm.quantum.operator import superop_dims  # noqa
from qdnorm.quantum.channels import kraus_to_superop, apply_superop  # noqa
from qdnorm.quantum.channels import identity_channel, unitary_channel  # noqa
from qdnorm.quantum.channels import depolarizing_channel  # noqa
from qdnorm.quantum.channels import amplitude_damping_channel  # noqa
from qdnorm.quantum.channels import random_channel  # noqa

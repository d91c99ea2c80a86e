# -*- coding: utf-8 -*-
"""HALOHEAT: distributed 2D heat diffusion with topology-aware halo exchange."""

__version__ = "0.1.0"

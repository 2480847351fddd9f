"""Rician bias correction of diffusion-weighted signals."""

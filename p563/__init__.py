"""Signal-processing building blocks for single-ended speech quality analysis."""

__version__ = "0.1.0"
__all__ = ["distribution", "filters", "fourier", "iir", "lpc", "noise", "segsnr"]
"""Core of the E-Com Studio service: generation batches and the gallery they fill."""

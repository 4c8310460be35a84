"""Numerical consistency checks for materials.

Components:
    estimators: Monte Carlo kernels for pdf normalization, sample/pdf
        consistency, direction histograms, directional albedo and BRDF
        reciprocity

Import after ``ti.init``:

    >>> from pathshade.analysis.estimators import estimate_pdf_integral
"""

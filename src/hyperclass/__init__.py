"""
HyperClass - Hyperdimensional Computing Classifier
==================================================

Classifies continuous feature vectors (e.g. spectral frequency points) by
encoding them into hypervectors and comparing against learned class
prototypes.

Key Features:
    - Dense (signed integer) and binary (packed bit) hypervectors
    - Continuous item memory whose similarity decays with level distance
    - Channel-bound, bundled sample encoding
    - Prototype training by iterative error correction
    - Plain-text checkpoints, datasets and CSV metrics reports

Main Packages:
    - core: vector algebra, memories, encoder, classifier, persistence
    - cli: Command-line interface

Quick Start:
    from hyperclass.core import Classifier, Model

    model = Model(levels=10, dimension=10000, channels=617)
    classifier = Classifier(model)
    classifier.load_datasets("./dataset")
    metrics = classifier.train(epochs=2)

Version: 1.0.0
"""

__version__ = "1.0.0"

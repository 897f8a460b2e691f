"""
OCRS API Server

A FastAPI-based API server that recognizes text in uploaded images.
Detection and recognition models are fetched at startup and served
through a pluggable OCR engine backend.
"""

__version__ = "1.0.0"
__author__ = "OCRS API"

"""ID Card OCR Service.

Reads Pakistani CNIC cards for visitor check-in: OpenCV preprocessing,
Tesseract OCR with a low-confidence retry, and language-model field
extraction with a regex fallback.
"""

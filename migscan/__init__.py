"""
migscan
-------
File inventory scanner for data migrations, built around a dependency-free
OOXML codec: metadata inspection of DOCX/XLSX packages (inspector.py) and a
minimal XLSX writer for the report (writer.py).
"""
__version__ = "1.0.0"

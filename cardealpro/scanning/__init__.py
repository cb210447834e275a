from cardealpro.scanning.license_parser import parse_ohio_license
from cardealpro.scanning.scanner import LicenseScanner, ScanResult, UnsupportedImageError

__all__ = ["parse_ohio_license", "LicenseScanner", "ScanResult", "UnsupportedImageError"]

"""Allure Dashboard - lists, compares and downloads Allure result bundles stored in S3"""

__version__ = "1.0.0"

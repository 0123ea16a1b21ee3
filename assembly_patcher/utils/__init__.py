#!/usr/bin/env python3

"""
Utility modules for the assembly patcher.
"""

from .performance_monitor import PerformanceMonitor, PerformanceMetrics

__all__ = ['PerformanceMonitor', 'PerformanceMetrics']

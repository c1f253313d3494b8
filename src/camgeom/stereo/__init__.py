"""
Stereo pair geometry: rectification of a calibrated pair and dense scene
reconstruction from disparity.
"""

"""
Real-time Pygame window with a status HUD for the arm simulation.
"""

"""Hector - build small AI-generation apps from inputs, actions and templates."""

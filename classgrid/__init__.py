"""
ClassGrid: weekly class schedule builder and random group generator.
"""

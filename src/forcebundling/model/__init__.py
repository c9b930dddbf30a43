"""
The MODEL layer contains pure data structures and geometry.
It has NO knowledge of the solver schedule or of any rendering layer.
It deals with node positions, edges and the vector math between them.
"""

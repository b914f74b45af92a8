"""Readers for scene descriptions and meshes.

Components:
    obj: Wavefront OBJ mesh loader
    scene_file: Text scene description reader

Note: scene_file is NOT imported here to avoid circular imports, since the
scene manager itself uses the OBJ loader. Import it directly from
whitted.io.scene_file.
"""

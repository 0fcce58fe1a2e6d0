
bl_info = {
    "name": "LightWave Object Importer",
    "author": "miningmanna",
    "version": (0, 1, 0),
    "blender": (3, 2, 1),
    "location": "Files -> Import-Export",
    "description": "Plugin for importing LightWave Objects (LWOB and LWO2)",
    "warning": "",
    "doc_url": "",
    "category": "Import-Export"
}

from .LwoErrors import FormatError, LwoError, ParsingError
from .LwoLoad import LwoData, load_lwo, parse_lwo

""" bpy is only imported on registration, so the loader works outside of Blender """
def classes():
    from .operators import LWOImporter

    return (
        LWOImporter.LWOImporter,
        LWOImporter.LWOLOADER_PT_import_settings
        )

def menu_func_import(self, context):
    from .operators import LWOImporter

    self.layout.operator(LWOImporter.LWOImporter.bl_idname,
                         text="LightWave Object (.lwo)")

def register():
    import bpy

    for c in classes():
        bpy.utils.register_class(c)

    bpy.types.TOPBAR_MT_file_import.append(menu_func_import)

def unregister():
    import bpy

    bpy.types.TOPBAR_MT_file_import.remove(menu_func_import)

    for c in reversed(classes()):
        bpy.utils.unregister_class(c)


if __name__ == "__main__":
    register()

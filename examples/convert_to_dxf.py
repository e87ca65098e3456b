import dxfcodec
from dxfcodec.entity import Entity


doc = dxfcodec.Document("R2000")
doc.new_table_entry("LAYER", "WALLS", color=1)
doc.add_entity(Entity("LINE", dxf={"layer": "WALLS", "start": (0.0, 0.0, 0.0), "end": (10.0, 0.0, 0.0)}))
dxfcodec.write(doc, "/tmp/walls_2000.dxf")

result = dxfcodec.convert(
    "/tmp/walls_2000.dxf",
    "/tmp/walls_r12.dxf",
    version="R12",
)
print(result)

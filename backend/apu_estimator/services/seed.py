from apu_estimator.schemas.project import Resource, ResourceType
from apu_estimator.services.store import ProjectStore

def seed_demo(store: ProjectStore):
    # Create default project if none
    if len(store):
        return
    p = store.create("Demo Project", location="Demo site")
    apu = store.add_apu(p.id)
    apu.description = "Brick wall, 15 cm"
    apu.unit = "m2"
    apu.quantity = 120
    apu.category = "Walls"
    apu.resources = [
        Resource(name="Solid brick", unit="pza", price=0.45, quantity=55, type=ResourceType.MATERIAL),
        Resource(name="Mortar", unit="m3", price=85.0, quantity=0.03, type=ResourceType.MATERIAL),
        Resource(name="Mason crew", unit="jor", price=60.0, quantity=0.12, type=ResourceType.LABOR),
        Resource(name="Hand tools", unit="%mo", price=7.2, quantity=0.03, type=ResourceType.EQUIPMENT),
    ]
    store.replace_apus(p.id, [apu])

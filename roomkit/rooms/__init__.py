from roomkit.rooms.descriptor import RoomDescriptor, SectionProperties, room_label, section_properties

__all__ = ["RoomDescriptor", "SectionProperties", "room_label", "section_properties"]

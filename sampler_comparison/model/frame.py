class Frame:
    """
    One entry of a call stack as seen by a capture mechanism.

    :param name: the method (or function) name
    :param class_name: the declaring class; for Python functions outside of a class this is the module name
    """

    __slots__ = ("name", "class_name")

    def __init__(self, name, class_name=None):
        self.name = name
        self.class_name = class_name

    @classmethod
    def of(cls, frame):
        """
        Accepts a Frame or a (class_name, method_name) pair.
        """
        if isinstance(frame, Frame):
            return frame
        class_name, name = frame
        return cls(name=name, class_name=class_name)

    def __eq__(self, other):
        return isinstance(other, Frame) and self.name == other.name and self.class_name == other.class_name

    def __hash__(self):
        return hash((self.name, self.class_name))

    def __repr__(self):
        return "Frame({}.{})".format(self.class_name, self.name)

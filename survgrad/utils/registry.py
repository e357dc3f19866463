class Registry:
    """Simple name->class registry for survival model adapters and attribution methods."""
    _models = {}
    _methods = {}

    @classmethod
    def register_model(cls, name):
        def deco(kls):
            cls._models[name] = kls
            return kls
        return deco

    @classmethod
    def register_method(cls, name):
        def deco(kls):
            cls._methods[name] = kls
            return kls
        return deco

    @classmethod
    def get_model(cls, name): return cls._models[name]
    @classmethod
    def get_method(cls, name): return cls._methods[name]

    @classmethod
    def model_names(cls): return tuple(cls._models)
    @classmethod
    def method_names(cls): return tuple(cls._methods)

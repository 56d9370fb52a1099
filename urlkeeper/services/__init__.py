from urlkeeper.services.mapping_service import MappingService, Redirect


__all__ = ['MappingService', 'Redirect']

"""Dynamic extractor registration system."""
import logging
from typing import Dict, Type, List, Set, Optional

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Registry for discovering and instantiating extractors."""
    
    _extractors: Dict[str, Type] = {}
    _fields: Dict[str, str] = {}  # Maps extractor name to the Report field it fills
    _order: List[str] = []  # Preserve registration order
    
    @classmethod
    def register(cls, name: str, report_field: str):
        """Decorator to register an extractor class.
        
        Args:
            name: Unique identifier for the extractor (e.g., "comments")
            report_field: Report attribute receiving the extractor's output
        
        Example:
            @ExtractorRegistry.register("comments", report_field="comments")
            class CommentsExtractor:
                def __init__(self, config, patterns, whitelist):
                    ...
                
                def extract(self, context: ScanContext) -> List[CommentFinding]:
                    ...
        """
        def decorator(extractor_class: Type):
            if name in cls._extractors:
                logger.warning(f"Extractor '{name}' already registered, overwriting")
            else:
                cls._order.append(name)
            
            cls._extractors[name] = extractor_class
            cls._fields[name] = report_field
            logger.debug(f"Registered extractor: {name} -> {extractor_class.__name__} ({report_field})")
            return extractor_class
        return decorator
    
    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered extractors in registration order."""
        return cls._order.copy()
    
    @classmethod
    def get_report_field(cls, name: str) -> Optional[str]:
        return cls._fields.get(name)
    
    @classmethod
    def get_fields(cls) -> Dict[str, str]:
        return dict(cls._fields)
    
    @classmethod
    def instantiate_all(cls, config, patterns, whitelist, exclude: Set[str] = None) -> Dict[str, object]:
        """Instantiate registered extractors.
        
        Args:
            config: ScanConfig shared by all extractors
            patterns: Compiled directive PatternSet
            whitelist: Whitelist used for embed membership
            exclude: Set of extractor names to skip
        
        Returns:
            Dictionary mapping extractor name to instantiated extractor object
        """
        exclude = exclude or set()
        instances = {}
        
        for name in cls._order:
            if name in exclude:
                logger.info(f"Skipping excluded extractor: {name}")
                continue
            instances[name] = cls._extractors[name](config, patterns, whitelist)
            logger.debug(f"Instantiated extractor: {name}")
        
        return instances
    
    @classmethod
    def clear(cls):
        """Clear all registered extractors (useful for testing)."""
        cls._extractors.clear()
        cls._fields.clear()
        cls._order.clear()

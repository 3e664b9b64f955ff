import logging 
import os 


DEFAULT_LOG_FORMAT:str = '%(asctime)s - %(levelname)s: %(message)s'


def setup_logger(log_file_path:str|None, logger_name:str, min_level:int=logging.DEBUG, log_format:str=DEFAULT_LOG_FORMAT) -> logging.Logger:
    """Sets up a logger that writes to the given filepath, or to stderr when no filepath is given."""
    
    # Init a logger and set the lowest level to DEBUG (so all logs are captured)
    logger:logging.Logger = logging.getLogger(logger_name)
    logger.setLevel(min_level)
    
    # Prevent double logging if root logger is used
    logger.propagate = False  

    # Avoid duplicate handlers if setup is called multiple times
    if not logger.handlers:
        
        handler:logging.Handler
        if log_file_path: 

            # Create the output dir if it doesn't exist
            log_dir:str = os.path.dirname(log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            handler = logging.FileHandler(log_file_path, encoding='utf-8')
        else: 
            handler = logging.StreamHandler()

        logger.addHandler(handler)
        
        # Set the format for logs 
        formatter:logging.Formatter = logging.Formatter(log_format)
        handler.setFormatter(formatter)
        
    # Return the logger
    return logger

# Read side of the documents root: tag-aware listing and search
